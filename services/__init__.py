"""
Relay Services
==============

HTTP services built on the shared ``common`` library.
"""
