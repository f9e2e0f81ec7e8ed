from .hive import ElevatedRegistry, HardenedHive, HardenedRegistry, Hive

__all__ = ['ElevatedRegistry', 'HardenedRegistry', 'Hive', 'HardenedHive']
