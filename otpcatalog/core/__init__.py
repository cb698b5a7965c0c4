"""Core components: transport, session state machine and catalog view-model."""
