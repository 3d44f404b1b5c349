"""
L1 Domain — pure logic (no I/O, no subprocess).

- ``errors``  — the provisioning failure taxonomy
- ``version`` — dotted-numeric version comparison and parsing
"""
