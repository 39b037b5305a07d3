"""pygame window, keyboard and audio back-ends."""
