"""Flask front end for the reducing-balance loan calculator."""
