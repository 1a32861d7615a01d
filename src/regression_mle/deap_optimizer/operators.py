"""
Genetic operators for the DEAP optimizer.

DEAP's own bounded operators draw from the global ``random`` module. The
versions here follow the same formulas but take an explicit
``numpy.random.Generator`` so that one seeded stream drives the whole run.
Dimensions whose lower and upper bounds coincide are never touched.
"""

from operator import attrgetter

from deap import base, creator

if not hasattr(creator, "FitnessMax"):
    creator.create("FitnessMax", base.Fitness, weights=(1.0,))
if not hasattr(creator, "Individual"):
    creator.create("Individual", list, fitness=creator.FitnessMax)


def _sbx_spread(rand, beta, eta):
    alpha = 2.0 - beta ** -(eta + 1.0)
    if rand <= 1.0 / alpha:
        return (rand * alpha) ** (1.0 / (eta + 1.0))
    return (1.0 / (2.0 - rand * alpha)) ** (1.0 / (eta + 1.0))


def cx_simulated_binary_bounded(ind1, ind2, rng, eta, low, up):
    """
    Simulated binary bounded crossover, modifying both individuals in place.

    Parameters
    ----------
    ind1, ind2 : Individual
        Parents; they become the children.
    rng : numpy.random.Generator
        Random stream of the run.
    eta : float
        Crowding degree. High values keep children close to their parents.
    low, up : sequence of float
        Bounds of every gene.

    Returns
    -------
    tuple
        ``(ind1, ind2)``
    """
    for i, (xl, xu) in enumerate(zip(low, up)):
        if xl == xu:
            continue
        if rng.random() > 0.5:
            continue
        if abs(ind1[i] - ind2[i]) <= 1e-14:
            continue

        x1 = min(ind1[i], ind2[i])
        x2 = max(ind1[i], ind2[i])
        rand = rng.random()

        beta_q = _sbx_spread(rand, 1.0 + (2.0 * (x1 - xl) / (x2 - x1)), eta)
        c1 = 0.5 * (x1 + x2 - beta_q * (x2 - x1))

        beta_q = _sbx_spread(rand, 1.0 + (2.0 * (xu - x2) / (x2 - x1)), eta)
        c2 = 0.5 * (x1 + x2 + beta_q * (x2 - x1))

        c1 = min(max(c1, xl), xu)
        c2 = min(max(c2, xl), xu)

        if rng.random() <= 0.5:
            ind1[i], ind2[i] = c2, c1
        else:
            ind1[i], ind2[i] = c1, c2

    return ind1, ind2


def mut_polynomial_bounded(individual, rng, eta, low, up, indpb):
    """
    Polynomial bounded mutation, in place.

    Each gene mutates independently with probability ``indpb``; the result
    is clamped back into ``[low, up]``.

    Returns
    -------
    tuple
        ``(individual,)``
    """
    mut_pow = 1.0 / (eta + 1.0)
    for i, (xl, xu) in enumerate(zip(low, up)):
        if xl == xu:
            continue
        if rng.random() > indpb:
            continue

        x = individual[i]
        delta_1 = (x - xl) / (xu - xl)
        delta_2 = (xu - x) / (xu - xl)
        rand = rng.random()

        if rand < 0.5:
            xy = 1.0 - delta_1
            val = 2.0 * rand + (1.0 - 2.0 * rand) * xy ** (eta + 1.0)
            delta_q = val ** mut_pow - 1.0
        else:
            xy = 1.0 - delta_2
            val = 2.0 * (1.0 - rand) + 2.0 * (rand - 0.5) * xy ** (eta + 1.0)
            delta_q = 1.0 - val ** mut_pow

        x = x + delta_q * (xu - xl)
        individual[i] = min(max(x, xl), xu)

    return (individual,)


def sel_tournament(individuals, k, rng, tournsize):
    """
    Select ``k`` individuals, each the fittest of ``tournsize`` drawn uniformly
    with replacement.
    """
    chosen = []
    n = len(individuals)
    for _ in range(k):
        aspirants = [individuals[j] for j in rng.integers(0, n, size=tournsize)]
        chosen.append(max(aspirants, key=attrgetter("fitness")))
    return chosen


def init_population(n, rng, bounds):
    """``n`` individuals drawn uniformly within ``bounds``."""
    return [creator.Individual(row) for row in bounds.sample(rng, n).tolist()]


def create_toolbox(bounds, config, rng):
    """
    Create and configure a DEAP toolbox bound to one random stream.

    Parameters
    ----------
    bounds : Bounds
        Search space.
    config : GAConfig
        Operator settings (``eta``, ``gene_mutation_prob``,
        ``tournament_size``).
    rng : numpy.random.Generator
        Random stream shared by every operator.

    Returns
    -------
    deap.base.Toolbox
        Toolbox with ``population``, ``mate``, ``mutate``, ``select`` and
        ``clone`` registered.
    """
    toolbox = base.Toolbox()
    low = bounds.lower.tolist()
    up = bounds.upper.tolist()

    toolbox.register("population", init_population, rng=rng, bounds=bounds)
    toolbox.register("mate", cx_simulated_binary_bounded, rng=rng, eta=config.eta, low=low, up=up)
    toolbox.register(
        "mutate",
        mut_polynomial_bounded,
        rng=rng,
        eta=config.eta,
        low=low,
        up=up,
        indpb=config.gene_mutation_prob,
    )
    toolbox.register("select", sel_tournament, rng=rng, tournsize=config.tournament_size)
    return toolbox


def var_and(offspring, toolbox, rng, cxpb, mutpb):
    """
    Crossover then mutation on cloned offspring.

    Consecutive pairs are mated with probability ``cxpb``; every offspring
    is then mutated with probability ``mutpb``. Modified individuals have
    their fitness invalidated.
    """
    offspring = [toolbox.clone(ind) for ind in offspring]

    for i in range(1, len(offspring), 2):
        if rng.random() < cxpb:
            offspring[i - 1], offspring[i] = toolbox.mate(offspring[i - 1], offspring[i])
            del offspring[i - 1].fitness.values
            del offspring[i].fitness.values

    for i in range(len(offspring)):
        if rng.random() < mutpb:
            offspring[i], = toolbox.mutate(offspring[i])
            del offspring[i].fitness.values

    return offspring
