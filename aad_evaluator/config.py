"""
Configuration dataclasses for the evaluator and the optimization driver.
"""

from dataclasses import dataclass

BACKENDS = ("reverse", "forward", "finite_difference")
HESSIAN_METHODS = ("for", "edge_pushing")


@dataclass
class EvaluatorConfig:
    """Configuration for Evaluator."""
    # Derivative backend
    backend: str = 'reverse'          # 'reverse', 'forward', 'finite_difference'
    hessian_method: str = 'for'       # reverse backend only: 'for', 'edge_pushing'

    # Non-finite outputs raise NumericalError instead of propagating NaN/inf
    check_finite: bool = False

    # Derivative cross-check against finite differences
    fd_step: float = 1e-6
    rtol: float = 1e-6
    atol: float = 1e-8

    # Logging
    verbose: bool = False

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend: {self.backend!r} (expected one of {BACKENDS})")
        if self.hessian_method not in HESSIAN_METHODS:
            raise ValueError(
                f"Unknown Hessian method: {self.hessian_method!r} (expected one of {HESSIAN_METHODS})"
            )
        if self.fd_step <= 0:
            raise ValueError(f"fd_step must be positive, got {self.fd_step}")
        if self.rtol < 0 or self.atol < 0:
            raise ValueError("rtol and atol must be non-negative")


@dataclass
class MinimizeConfig:
    """Configuration for the quasi-Newton driver."""
    method: str = 'BFGS'              # any scipy.optimize.minimize method
    max_iterations: int = 500
    tolerance: float = 1e-6
    use_hessian: bool = False         # pass the AD Hessian (Newton-CG, trust-*)
    output_index: int = 0             # which output is minimized

    # Logging
    verbose: bool = False

    def __post_init__(self):
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
