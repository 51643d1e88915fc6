"""Core contracts (Protocol).

Concrete adapters (adb forward, iOS tunnel, rich console) implement these;
the services depend on the abstractions only.
"""
