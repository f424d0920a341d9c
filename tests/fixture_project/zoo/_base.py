class Animal:
    sound = None

    def speak(self):
        return self.sound
