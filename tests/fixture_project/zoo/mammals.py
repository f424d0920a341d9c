from ._base import Animal


class Mammal(Animal):
    legs = 4


class Dog(Mammal):
    sound = "woof"


class Cat(Mammal):
    sound = "meow"
