"""
Build script for creating a standalone executable using PyInstaller.

Calibre is not bundled: the executable still needs `ebook-convert` installed
on the machine it runs on.
"""

import PyInstaller.__main__  # type: ignore

PyInstaller.__main__.run(["main.py", "--onefile", "--name=ebook-crosscheck"])
