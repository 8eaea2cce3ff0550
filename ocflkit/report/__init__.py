"""Terminal reporting for ocflkit.

Modules
-------
renderer
    ``ResultsRenderer`` turns ``OcflResults``, delta records and version
    file lists into Rich renderables.
"""
