import numpy as np
from pykinetics.core.log_config import setup_logging
from pykinetics.solvers.factory import new_integrator
from pykinetics.solvers.integrator import FuncEval, ProblemType
from pykinetics.thermo.factory import import_species_thermo
from pykinetics.io.ctml import parse_ctml

setup_logging()

class Robertson(FuncEval):
    """Robertson's stiff kinetics problem, with the three rate constants
    as sensitivity parameters"""

    def __init__(self):
        super().__init__()
        self.sens_params = np.array([0.04, 3e7, 1e4])

    def get_rhs(self, t, y):
        k1, k2, k3 = self.sens_params
        y1, y2, y3 = y
        return np.array([
            -k1*y1 + k3*y2*y3,
            k1*y1 - k3*y2*y3 - k2*y2**2,
            k2*y2**2,
        ])

    def n_equations(self):
        return 3

    def get_initial_conditions(self, t0):
        return np.array([1.0, 0.0, 0.0])

# Integrate with sensitivities
integrator = new_integrator("CVODES")
integrator.set_tolerances(1e-6, [1e-8, 1e-14, 1e-6])
integrator.set_sensitivity_tolerances(1e-4, 1e-8)
integrator.set_problem_type(ProblemType.DENSE | ProblemType.NOJAC)
integrator.initialize(0.0, Robertson())

for tout in [0.4, 4.0, 40.0, 400.0]:
    integrator.integrate(tout)
    y = integrator.solution()
    dy1 = [integrator.sensitivity(0, p) for p in range(integrator.n_sens_params())]
    print(f"t = {tout:8.1f}, y = {y}, dy1/dk = {np.array(dy1)}")

print(f"function evaluations: {integrator.n_evals()}")

# Species thermo for a phase mixing NASA and Shomate parameterizations
species = parse_ctml("""
<speciesData id="species_data">
  <species name="H2">
    <thermo>
      <NASA Tmin="200.0" Tmax="1000.0" P0="100000.0">
        <floatArray name="coeffs" size="7">
          2.34433112E+00, 7.98052075E-03, -1.94781510E-05, 2.01572094E-08,
          -7.37611761E-12, -9.17935173E+02, 6.83010238E-01</floatArray>
      </NASA>
      <NASA Tmin="1000.0" Tmax="3500.0" P0="100000.0">
        <floatArray name="coeffs" size="7">
          3.33727920E+00, -4.94024731E-05, 4.99456778E-07, -1.79566394E-10,
          2.00255376E-14, -9.50158922E+02, -3.20502331E+00</floatArray>
      </NASA>
    </thermo>
  </species>
  <species name="N2">
    <thermo>
      <Shomate Tmin="100.0" Tmax="500.0" P0="100000.0">
        <floatArray name="coeffs" size="7">
          28.98641, 1.853978, -9.647459, 16.63537, 0.000117,
          -8.671914, 226.4168</floatArray>
      </Shomate>
      <Shomate Tmin="500.0" Tmax="2000.0" P0="100000.0">
        <floatArray name="coeffs" size="7">
          19.50583, 19.88705, -8.598535, 1.369784, 0.527601,
          -4.935202, 212.3900</floatArray>
      </Shomate>
    </thermo>
  </species>
</speciesData>
""")

thermo, names = import_species_thermo(species)
print(f"manager: {thermo!r}")
for T in [300.0, 1000.0, 1500.0]:
    cp_R, h_RT, s_R = thermo.properties(T)
    for k, name in enumerate(names):
        print(f"T = {T:6.1f} K  {name:3s} cp/R = {cp_R[k]:.4f}  "
              f"h/RT = {h_RT[k]:.4f}  s/R = {s_R[k]:.4f}")
