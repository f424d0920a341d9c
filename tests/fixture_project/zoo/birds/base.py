import zoo


class Bird(zoo.Animal):
    legs = 2
