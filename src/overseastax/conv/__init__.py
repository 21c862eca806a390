from .conv import parse_date, parse_datetime, to_dec, to_dec_strict

__all__ = ["to_dec", "to_dec_strict", "parse_date", "parse_datetime"]
