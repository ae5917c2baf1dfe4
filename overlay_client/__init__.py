"""Overlay host process: window registry, start-up dispatch and Qt windows."""
