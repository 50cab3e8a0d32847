"""Users, sessions, authentication, authorization and an OAuth client."""