"""
Service layer for the ashes registry.

query and csv_codec are pure. collection holds session state. reconciler is
the only code that talks to the gateway and mutates collections.
"""
