class Animal(object):
    pass


class Fossil(Animal):
    pass
