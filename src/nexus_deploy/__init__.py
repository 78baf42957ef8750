"""nexus-deploy - provision a host to build and run the Nexus CLI prover"""

__version__ = "0.1.0"
