"""Built-in supermarket classification tree.

One node per line: ``<code> <name>``, indented by two spaces per level below
Secteur. Order matters: it is preserved in the prompt sent to the model.
"""

CLASSIFICATION_HIERARCHY = """
01 PRODUITS FRAIS
  0101 FRUITS ET LEGUMES
    010101 FRUITS
      01010101 POMMES ET POIRES
      01010102 AGRUMES
      01010103 FRUITS EXOTIQUES
      01010104 FRUITS ROUGES
    010102 LEGUMES
      01010201 LEGUMES FEUILLES ET SALADES
      01010202 LEGUMES RACINES
      01010203 POMMES DE TERRE
      01010204 TOMATES
    010103 HERBES ET AROMATES
      01010301 HERBES FRAICHES
      01010302 AIL OIGNONS ECHALOTES
  0102 BOUCHERIE VOLAILLE
    010201 BOEUF
      01020101 STEAKS ET PIECES A GRILLER
      01020102 VIANDE HACHEE
    010202 VOLAILLE
      01020201 POULET
      01020202 DINDE
  0103 CREMERIE
    010301 LAIT ET BOISSONS LACTEES
      01030101 LAIT UHT
      01030102 LAIT FRAIS
    010302 YAOURTS ET DESSERTS LACTES
      01030201 YAOURTS NATURE
      01030202 YAOURTS AUX FRUITS
      01030203 CREMES DESSERTS
    010303 FROMAGES
      01030301 FROMAGES A PATE DURE
      01030302 FROMAGES A PATE MOLLE
      01030303 FROMAGES RAPES
    010304 BEURRE ET OEUFS
      01030401 BEURRE
      01030402 OEUFS
  0104 BOULANGERIE
    010401 PAIN
      01040101 BAGUETTES
      01040102 PAINS SPECIAUX
    010402 VIENNOISERIE
      01040201 CROISSANTS ET PAINS AU CHOCOLAT
      01040202 BRIOCHES
02 EPICERIE
  0201 EPICERIE SALEE
    020101 PATES RIZ ET FECULENTS
      02010101 PATES
      02010102 RIZ
      02010103 SEMOULE ET CEREALES
    020102 CONSERVES
      02010201 CONSERVES DE LEGUMES
      02010202 CONSERVES DE POISSON
      02010203 PLATS CUISINES APPERTISES
    020103 SAUCES ET CONDIMENTS
      02010301 HUILES ET VINAIGRES
      02010302 SAUCES FROIDES
      02010303 EPICES ET SEL
  0202 EPICERIE SUCREE
    020201 PETIT DEJEUNER
      02020101 CEREALES DU PETIT DEJEUNER
      02020102 CAFE
      02020103 THE ET INFUSIONS
      02020104 CONFITURES ET PATES A TARTINER
    020202 BISCUITS ET GATEAUX
      02020201 BISCUITS SECS
      02020202 GATEAUX MOELLEUX
    020203 CONFISERIE
      02020301 CHOCOLAT EN TABLETTE
      02020302 BONBONS
03 BOISSONS
  0301 BOISSONS SANS ALCOOL
    030101 EAUX
      03010101 EAUX PLATES
      03010102 EAUX GAZEUSES
    030102 JUS ET NECTARS
      03010201 JUS DE FRUITS
      03010202 NECTARS
    030103 SODAS
      03010301 COLAS
      03010302 LIMONADES
  0302 BOISSONS ALCOOLISEES
    030201 VINS
      03020101 VINS ROUGES
      03020102 VINS BLANCS
      03020103 VINS ROSES
    030202 BIERES
      03020201 BIERES BLONDES
      03020202 BIERES SPECIALES
04 DROGUERIE PARFUMERIE HYGIENE
  0401 ENTRETIEN DE LA MAISON
    040101 LESSIVE
      04010101 LESSIVE LIQUIDE
      04010102 ADOUCISSANT
    040102 PRODUITS VAISSELLE
      04010201 LIQUIDE VAISSELLE
      04010202 TABLETTES LAVE-VAISSELLE
  0402 HYGIENE ET BEAUTE
    040201 SOINS DU CORPS
      04020101 GELS DOUCHE
      04020102 DEODORANTS
    040202 HYGIENE BUCCO-DENTAIRE
      04020201 DENTIFRICES
      04020202 BROSSES A DENTS
"""
