DEFAULTS = {
    # Title of the FastAPI application
    "APP_NAME": "flowcanvas-backend",
    # Prefix prepended to every router
    "API_PREFIX": "",
    # Radius of the ports created for new nodes
    "PORT_RADIUS": 15.0,
    # Alignment of the ports on their side
    "PORT_ALIGNMENT": "CENTER",
    # Accept several edges entering the same WEST port
    "CONNECTIONS_ALLOW_MULTIPLE_INBOUND": True,
    # Accept edges from a node to itself
    "CONNECTIONS_ALLOW_NODE_SELF_LOOP": False,
    # Delay of mutations queued without an explicit one (ms)
    "QUEUE_DEFAULT_DELAY_MS": 0.0,
    # Delay shared by the mutations of one interaction (ms)
    "QUEUE_COALESCE_DELAY_MS": 0.0,
    # Applied mutations kept in the store history
    "QUEUE_HISTORY_LIMIT": 1000,
    # Create the start node when the canvas is empty
    "SEED_START_NODE": True,
}
