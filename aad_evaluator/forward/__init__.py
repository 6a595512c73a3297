# forward/__init__.py
# Forward-mode differentiation: dual numbers (Jacobian) and 2nd-order Taylor numbers (Hessian)

from .dual import Dual, seed_duals, dual_jacobian
from . import taylor
from .taylor import TVar, taylor_grad_hessian, taylor_hessian

__all__ = [
    'Dual',
    'seed_duals',
    'dual_jacobian',
    'taylor',
    'TVar',
    'taylor_grad_hessian',
    'taylor_hessian',
]
