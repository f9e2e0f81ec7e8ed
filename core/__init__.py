from .container import Container
from .lifecycle import Activatable, ComponentEntry, ComponentGroup, SpawnedChild
from .pubsub import PubSub, PubSubKey

__all__ = [
    'Container',
    'Activatable',
    'ComponentEntry',
    'ComponentGroup',
    'SpawnedChild',
    'PubSub',
    'PubSubKey',
]
