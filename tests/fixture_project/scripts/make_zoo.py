from zoo.mammals import Dog


class RobotDog(Dog):
    sound = "beep"


def build():
    class Temporary(Dog):
        pass

    return Temporary
