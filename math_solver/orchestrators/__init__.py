from math_solver.orchestrators.solver.service import build_solve_response, solve_problem

__all__ = ["solve_problem", "build_solve_response"]
