"""
toolchainfinder - native compiler toolchain discovery.

Locates installed GCC, Clang, MinGW, Cygwin, Visual C++ and Swift toolchains,
ranks them, and selects one by capability requirement.
"""

__version__ = "0.1.0"
