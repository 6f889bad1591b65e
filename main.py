from rich.pretty import pprint

from argbind import *


class Options:
    verbose = Flag("v", "verbose")
    level = Option("O", "opt-level", type=int, default=2)
    passes = Multiple("p", "pass")
    inputs = Cardinals()


if __name__ == '__main__':
    options = bind(Options, shell=True)
    pprint({binding.name: getattr(options, binding.name) for binding in catalog(Options)})
