"""Shopify order webhook -> vendor CSV -> FTP relay."""
