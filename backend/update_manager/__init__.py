"""Update Manager: device update compliance tracking and agent channel."""
