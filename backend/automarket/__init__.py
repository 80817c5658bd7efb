"""AutoMarket: multi-role marketplace backend for automotive services."""
