from .base import Bird
from .. import mammals


class Parrot(Bird):
    sound = "hello"


class Griffin(Bird, mammals.Mammal):
    pass
