"""
L4 Execution — everything that touches the filesystem, the network
or an external process.

- ``subprocess_runner`` — the single place build tools are spawned
- ``checksum``          — sha256 digests of local files
- ``download``          — URL probing and transfer with fallback
- ``privilege``         — prefix writability and sudo escalation
- ``working_tree``      — the transient per-run directory
- ``extract``           — archive unpacking
- ``recipes``           — the three build procedures
"""
