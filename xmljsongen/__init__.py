"""Differential test-suite generator for the xml2json_rs XML<->JSON library."""

from xmljsongen._version import version as __version__
