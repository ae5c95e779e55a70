"""licensehook: Paddle webhook ingestion and license provisioning service."""
