from color import make_color


class Material:
    def __init__(self, color, diffuse, specular, specular_exponent, reflectance):
        self.color = make_color(*color)
        self.diffuse = float(diffuse)
        self.specular = float(specular)
        self.specular_exponent = float(specular_exponent)
        self.reflectance = float(reflectance)

    def __repr__(self):
        return ("Material(color={}, diffuse={}, specular={}, specular_exponent={}, "
                "reflectance={})".format(tuple(int(c) for c in self.color), self.diffuse,
                                         self.specular, self.specular_exponent, self.reflectance))
