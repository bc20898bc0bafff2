"""Voice Gateway: spoken question in, spoken answer out."""
