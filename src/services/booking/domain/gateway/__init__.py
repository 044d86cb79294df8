from .flight_inventory_client import FlightInventoryClient as FlightInventoryClient
