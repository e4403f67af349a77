from .LiquidSolver import LiquidSolver, LiquidSolverConfig

__all__ = ['LiquidSolver', 'LiquidSolverConfig']
