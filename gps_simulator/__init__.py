"""GPS fleet simulator - cars driving routes across borders, reporting their location."""
__version__ = "0.1.0"
