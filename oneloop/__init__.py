# __init__.py
from .api import one_loop
from .cosmology import Cosmology
from .power_spectrum import PowerSpectrum
from .spt import SPT, InvalidFieldIndexWarning
from .kernels import QMIN, QMAX

__all__ = ["one_loop", "Cosmology", "PowerSpectrum", "SPT", "InvalidFieldIndexWarning", "QMIN", "QMAX"]

# Version of the package
__version__ = "0.1"
