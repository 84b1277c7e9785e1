"""CareSlot: patient/doctor appointment booking backend."""
