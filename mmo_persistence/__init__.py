"""
Persistence engine for the MMO game server.

Maps players and guilds onto the relational schema and saves/restores a
character's full state as one unit.
"""

__version__ = "0.1.0"
