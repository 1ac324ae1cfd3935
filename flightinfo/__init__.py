"""
Flight Information Service

A small resource API for flight records backed by a relational store:
1. Create, update and delete flights through validated command handlers
2. Optimistic concurrency control with an opaque version token per flight
3. Flight listing and filtered search by airline, airport and date range

Airports are reference data looked up by their 4 character ICAO code.
"""

__version__ = "0.1.0"
