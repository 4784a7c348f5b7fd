import enum

I32_MIN = -(2**31)
I32_MAX = 2**31 - 1


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


def fits_i32(value: int) -> bool:
    return I32_MIN <= value <= I32_MAX
