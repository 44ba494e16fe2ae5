"""util package.

Modules:
    - utility_functions: Integer helpers (encodings, rounding, modular square and cube roots) and input checks.
"""
