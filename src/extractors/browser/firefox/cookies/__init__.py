"""Firefox cookie reading (cookies.sqlite, plaintext values)."""

from ._parsers import find_cookie_table, iter_cookie_results

__all__ = ["find_cookie_table", "iter_cookie_results"]
