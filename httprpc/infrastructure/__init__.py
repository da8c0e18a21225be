"""Infrastructure Layer — contract loading, bundle files, logging setup.

Invariants:
    - Infrastructure failures at startup surface as ConfigurationError
    - Bundle IO failures degrade to "no description", never to request errors
"""
