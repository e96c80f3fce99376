"""
jinspect Core Module
=====================

Error taxonomy, data models and the inspection engine.  Import from the
submodules directly; the parsers depend on :mod:`jinspect.core.errors`
and the models depend on the parsers.
"""
