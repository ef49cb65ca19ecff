"""Interactive terminal controller for off-chain payment channel sessions."""
