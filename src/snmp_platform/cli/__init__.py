"""
Operational CLI for the SNMP MIB Platform console.
"""
