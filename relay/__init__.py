"""Edge relay: CPU temperature sampler plus input1 -> output1 message pipe."""
