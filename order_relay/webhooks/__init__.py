"""Inbound Shopify webhooks.

Receives orders/create webhooks, verifies their HMAC signature and hands
accepted orders to the background pipeline.
"""
