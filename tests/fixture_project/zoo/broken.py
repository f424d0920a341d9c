from ._base import Animal


class Broken(Animal:
    pass
