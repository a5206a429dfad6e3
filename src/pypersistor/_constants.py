"""Constants shared across pypersistor."""

#: Default prefix prepended to every substate key in storage.
#: Changing it makes previously persisted records unreachable.
KEY_PREFIX: str = "reduxPersist:"

#: Event type dispatched to the store after rehydration.
REHYDRATE: str = "persist/REHYDRATE"
