# Outbreak zone markers, written by the epicenter/dispersal engine and read by the disturbance sweep
NO_ZONE = 0
NEW_ZONE = 1
LAST_ZONE = 2

# Highest severity class a disturbed site can be assigned
MAX_SEVERITY = 3

# Initial value of the time-of-last-event site variable (sites never disturbed by an agent)
TIME_OF_LAST_EVENT_DEFAULT = -10000

# Initial value of the time-of-next-outbreak site variable, before any agent is scheduled
TIME_OF_NEXT_DEFAULT = 9999

# Map code for management areas: sites that belong to no management area
NO_MANAGEMENT_AREA = -1

# Severity map codes: inactive sites and active sites left undisturbed
MAP_CODE_INACTIVE = 0
MAP_CODE_UNDISTURBED = 1
