"""Order processing: metafield enrichment, CSV export and the delivery pipeline."""
