def format_units(raw_amount: int, decimals: int) -> str:
    """
    Divides a raw integer amount by ``10 ** decimals`` without losing precision.  Whole numbers keep a single
    trailing zero so amounts always render with a decimal point.

    >>> format_units(1000000, 6)
    '1.0'
    >>> format_units(50000000, 9)
    '0.05'
    >>> format_units(-1500, 3)
    '-1.5'

    :param raw_amount: raw integer amount
    :param decimals: number of decimals for the unit
    :return: decimal string
    """
    sign = "-" if raw_amount < 0 else ""
    whole, fraction = divmod(abs(raw_amount), 10**decimals)
    if decimals == 0:
        return f"{sign}{whole}.0"

    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{fraction_str}"


def pprint_list(write_array: list[str], term_width: int) -> list[str]:
    """
    Prints an array of strings to the console, wrapping lines with a max width of term_width

    :param write_array:
    :param term_width:
    :return:
    """
    current_line, output = "", []
    for write_val in write_array:
        if len(current_line) + len(write_val) + 1 > term_width:
            output.append(current_line)
            current_line = ""
        current_line += f"'{write_val}', "
    output.append(current_line)
    return output
