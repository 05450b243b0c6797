import numpy as np

from toolkit.methods.essential import Orthographic3Pt
from toolkit.suites import parse_arguments, OrthographicSynth


# reproducibility is a great thing
np.random.seed(42)

# parse console arguments
args = parse_arguments()

# Just a loading data scenario
if args.load:
    session = OrthographicSynth.load(args.load)
    session.print_timings()
    session.print_errors()
    session.plot(tight=args.tight)
    quit()

# run something
session = OrthographicSynth(methods=[Orthographic3Pt], n_runs=args.runs)
session.run(noise=[0.0, 0.001, 0.002, 0.005, 0.01])
if args.save:
    session.save(args.save)
session.print_timings()
session.print_errors()
if not args.no_display:
    session.plot(tight=args.tight)
