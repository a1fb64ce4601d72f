# Rate constants of the endocytic Notch trafficking network
# (Shimizu et al., 2014). All quantities are non-dimensional.

# basal and trafficking rates
k_1 = 14.0
k_2 = 10.0
k_3 = 240.0
k_4 = 420.0
k_5 = 100.0
k_6 = 500.0
k_7 = 15.0
k_8 = 1.2
k_9 = 108.0
k_10 = 250.0
k_11 = 1.0
k_12 = 70.0
k_13 = 0.06

# constitutive offsets
c_3 = 14.0
c_4 = 14.0
c_8a = 14.0
c_8b = 14.0
c_9 = 14.0
c_10 = 14.0

# Delta production
beta_N = 10.0
f = 5.0

# cis-inhibition constant
k_c = 0.001

# feedback saturation constants
fb_D = 10.0
fb_N = 10.0
fb_5 = 10.0
fb_10 = 10.0

# Delta decay
gamma = 0.25

# Deltex and Su(dx) levels
dx = 10.0
sudx = 10.0
