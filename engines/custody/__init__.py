"""
Custody Engine
==============
Product registration, custody transfer and verification.

Public entry points live in engines.custody.wiring; this package
root stays import-light so Django can load it as an app.
"""
