"""HTTP routers for the Pitcrew API."""
