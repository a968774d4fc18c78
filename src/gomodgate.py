"""gomodgate - Go module proxy backed by the local go command.

Serves the module proxy protocol at the listen address by invoking the go
command, so it reuses that command's download cache and configuration
(GOPROXY, GOSUMDB and so on). The proxy must not share a GOPATH with its own
clients: a client locks a cache entry before asking the proxy, and the proxy
would then wait on that lock forever.
"""
from args import parse_args
from cli_proxy import run_proxy_server


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    run_proxy_server(args)


if __name__ == "__main__":
    main()
