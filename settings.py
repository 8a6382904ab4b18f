# settings.py

# Frame scheduling
FPS = 60
TITLE = "Skirmish Tactics"

# Battle grid
BATTLE_GRID_WIDTH = 16
BATTLE_GRID_HEIGHT = 12

# Pathfinding
ORTHOGONAL_STEP_COST = 1.0
DIAGONAL_STEP_COST = 2 ** 0.5
# Anything within one diagonal step counts as adjacent
ADJACENT_PROXIMITY_RADIUS = 1.5
# Generous search radius used when a bot plans routes across the whole map
EXPLORATION_RANGE = 60.0

# Turn economy
ACTION_POINTS_PER_TURN = 6
# Reactions may not bring a unit's AP below this number
REACTION_AP_THRESHOLD = 1
BASE_MOVEMENT_SPEED = 1.0

# Melee weapons reach any of the 8 surrounding cells
MELEE_RANGE = 1.5
