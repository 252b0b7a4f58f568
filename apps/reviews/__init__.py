"""Reviews app: guest ratings that drive hotel rating and popularity."""
