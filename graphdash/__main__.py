from graphdash.app import run

run()
