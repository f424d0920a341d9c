from .parrots import Parrot
