"""Chain replication: node state, replay buffers, interceptor, stream supervision and handshakes."""